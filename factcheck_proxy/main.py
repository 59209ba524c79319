"""Main script for fact checking from the terminal against a running gateway."""

import asyncio
from typing import Dict, List, Tuple

from .domain.models.claim import ProcessedClaim
from .domain.models.session import ClaimStatus, FactCheckSession, SessionListener
from .domain.models.verification import EvidenceItem, credibility_tone
from .domain.services.fact_checking_service import FactCheckError
from .infrastructure.dependencies import ServiceContainer


def _print_evidence(label: str, items: List[EvidenceItem]) -> None:
    if not items:
        return
    print(f"    {label}:")
    for item in items:
        print(f"      - {item.title} <{item.url}>")
        if item.snippet:
            print(f"        {item.snippet}")


def render_claim(claim: ProcessedClaim, checking: bool) -> None:
    """Print one claim card."""
    print(f"\n[{claim.id}] {claim.short_claim}  ({claim.claim_type})")
    if claim.original_text_excerpt:
        print(f'    "{claim.original_text_excerpt}"')

    checks = claim.claim_checks
    if checks is not None:
        if checks.logical_percent is not None:
            print(f"    Logical consistency: {checks.logical_percent}%  {checks.logical_issue or ''}")
        if checks.tonality_percent is not None:
            print(f"    Tonality: {checks.tonality_percent}%  {checks.short_reason or ''}")

    result = claim.evidence_result
    if result is not None:
        print(f"    Verdict: {result.verdict.upper()} [{result.tone.value}]  {result.confidence}% confidence")
        print(f"    {result.explanation}")
        _print_evidence("Supporting evidence", result.supporting_evidence)
        _print_evidence("Refuting evidence", result.refuting_evidence)
        for source in claim.sources or []:
            tone = credibility_tone(source.domain_cred_score)
            labels = ", ".join(source.trust_labels)
            print(f"    Source {source.domain}: {round(source.domain_cred_score * 100)}% [{tone.value}] {labels}")
    elif checking:
        print("    Checking evidence...")
    else:
        print("    Evidence not checked yet")


def progress_printer() -> SessionListener:
    """Session listener printing each claim card whenever that claim changes."""
    shown: Dict[Tuple[int, int], Tuple[ProcessedClaim, bool]] = {}

    def on_change(session: FactCheckSession) -> None:
        if session.is_extracting:
            return
        for claim in session.claims:
            state = (claim, session.is_checking(claim.id) and claim.evidence_result is None)
            key = (session.generation, claim.id)
            if shown.get(key) != state:
                shown[key] = state
                render_claim(*state)

    return on_change


async def main():
    """Run the fact checker."""
    print("Fact Checker - claims, evidence and source credibility")
    print("------------------------------------------------------")

    container = ServiceContainer()
    await container.startup()
    service = container.get_fact_checking_service()
    session = FactCheckSession()
    session.subscribe(progress_printer())

    try:
        while True:
            text = input("\nPaste a URL or text to fact-check (or 'quit' to exit): ")
            if text.lower() in ('quit', 'exit', 'q'):
                break

            print("\nExtracting claims...")
            try:
                await service.submit(session, text)
            except FactCheckError as e:
                print(f"\n!! {e}")
                continue
            print(f"\nInput type: {session.input_type.value}  Overall score: {session.overall_score}")

            # Claims after the first are only checked on request
            while True:
                pending = [c.id for c in session.claims if session.status_of(c.id) is ClaimStatus.IDLE]
                if not pending:
                    break
                choice = input(f"\nCheck evidence for claim {pending} (blank to continue): ").strip()
                if not choice:
                    break
                if not choice.isdigit() or int(choice) not in pending:
                    print("Unknown claim id")
                    continue
                await service.check_evidence(session, int(choice))

    finally:
        # Clean up
        await container.shutdown()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
