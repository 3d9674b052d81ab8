"""
scripts/run_qualification.py — CLI for scoring and qualifying prospects.

Usage:
    python scripts/run_qualification.py rapid @handle --business --low-engagement --followers 2400
    python scripts/run_qualification.py qualify 12 \
        --profitability "High (Clear offer, high-ticket)" \
        --visuals "Inconsistent / Messy" \
        --strategy "Getting Leads / Sales" \
        --backend rules
    python scripts/run_qualification.py refresh 12
"""

import sys
import os
import argparse
import logging

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from atlas.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("run_qualification")

from atlas.db.session import get_session
from atlas.qualification.errors import QualificationError
from atlas.qualification.models import HumanAssessment, RapidChecklist
from atlas.qualification.taxonomy import TriState, ValueProposition
from atlas.services import prospect_service
from atlas.services.scoring import recommend_next_action, score_tier


def _flag(value: bool) -> TriState:
    return TriState.YES if value else TriState.NO


def run_rapid(args: argparse.Namespace) -> None:
    checklist = RapidChecklist(
        is_business=_flag(args.business),
        has_inconsistent_grid=_flag(args.inconsistent_grid),
        has_low_engagement=_flag(args.low_engagement),
        has_no_clear_cta=_flag(args.no_cta),
        value_proposition=ValueProposition(args.value_proposition),
    )
    with get_session() as db:
        prospect = prospect_service.add_rapid_prospect(
            db, args.handle, checklist, follower_count=args.followers,
        )
        print(f"\n✅ @{prospect.instagram_handle} saved (id={prospect.id})")
        print(f"   Rapid score : {prospect.lead_score}/75")
        print(f"   Pain points : {', '.join(prospect.pain_points) or '—'}")
        print(f"   Goals       : {', '.join(prospect.goals) or '—'}")


def run_qualify(args: argparse.Namespace) -> None:
    assessment = HumanAssessment(
        profitability=args.profitability,
        visuals=args.visuals,
        strategy=args.strategy,
    )
    with get_session() as db:
        result = prospect_service.qualify_prospect(
            db, args.prospect_id, assessment, backend=args.backend,
        )

    print(f"\n✅ Prospect {args.prospect_id} qualified")
    print(f"   Lead score  : {result.lead_score}/100 ({score_tier(result.lead_score)})")
    print(f"   Pain points : {', '.join(result.pain_points) or '—'}")
    print(f"   Goals       : {', '.join(result.goals) or '—'}")
    print(f"   Summary     : {result.summary}")
    print(f"   Next action : {recommend_next_action(result.lead_score)}")


def run_refresh(args: argparse.Namespace) -> None:
    with get_session() as db:
        metrics = prospect_service.refresh_prospect_metrics(db, args.prospect_id)
    print(f"\n✅ @{metrics.instagram_handle}: {metrics.follower_count} followers, "
          f"{metrics.post_count} posts, avg {metrics.avg_likes} likes / {metrics.avg_comments} comments")


def main() -> int:
    parser = argparse.ArgumentParser(description="Atlas prospect qualification")
    sub = parser.add_subparsers(dest="command", required=True)

    rapid = sub.add_parser("rapid", help="Add a prospect from the rapid yes/no checklist")
    rapid.add_argument("handle", help="Instagram handle, with or without '@'")
    rapid.add_argument("--business", action="store_true", help="Account is a business")
    rapid.add_argument("--inconsistent-grid", action="store_true")
    rapid.add_argument("--low-engagement", action="store_true")
    rapid.add_argument("--no-cta", action="store_true", help="No clear call to action")
    rapid.add_argument(
        "--value-proposition",
        choices=[v.value for v in ValueProposition],
        default=ValueProposition.UNKNOWN.value,
    )
    rapid.add_argument("--followers", type=int, default=None)
    rapid.set_defaults(func=run_rapid)

    qualify = sub.add_parser("qualify", help="Run the evaluator on a stored prospect")
    qualify.add_argument("prospect_id", type=int)
    qualify.add_argument("--profitability", required=True)
    qualify.add_argument("--visuals", required=True)
    qualify.add_argument("--strategy", required=True)
    qualify.add_argument("--backend", choices=["llm", "rules"], default=None)
    qualify.set_defaults(func=run_qualify)

    refresh = sub.add_parser("refresh", help="Refresh a prospect's public Instagram metrics")
    refresh.add_argument("prospect_id", type=int)
    refresh.set_defaults(func=run_refresh)

    args = parser.parse_args()
    try:
        args.func(args)
    except QualificationError as e:
        logger.error("%s: %s", type(e).__name__, e)
        print(f"\n❌ {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
