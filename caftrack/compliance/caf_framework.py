#!/usr/bin/env python3
# CUI // SP-CTI
"""NCSC Cyber Assessment Framework catalog and GovAssure profile resolver.

Loads the CAF hierarchy (objective -> principle -> outcome) and the
GovAssure profile requirement table from context/compliance/ and exposes
them as immutable values. Nothing here is a module-level singleton: callers
load a CafFramework once and pass it (and its resolver) into the scoring
functions.

Usage:
    python -m caftrack.compliance.caf_framework --json
    python -m caftrack.compliance.caf_framework --outcome B2.a --profile Enhanced
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from caftrack.config import configure_logging, load_config, resolve_catalog_path
from caftrack.resilience.correlation import generate_correlation_id, set_correlation_id
from caftrack.resilience.errors import CafTrackError, CatalogError
from caftrack.schemas.compliance import AchievementLevel, AssuranceProfile

logger = logging.getLogger("caftrack.compliance.caf_framework")


@dataclass(frozen=True)
class Outcome:
    id: str
    name: str
    description: str = ""
    evidence: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Principle:
    id: str
    name: str
    description: str = ""
    outcomes: Tuple[Outcome, ...] = ()

    @property
    def outcome_ids(self) -> List[str]:
        return [o.id for o in self.outcomes]


@dataclass(frozen=True)
class Objective:
    id: str
    title: str
    principles: Tuple[Principle, ...] = ()

    @property
    def outcome_ids(self) -> List[str]:
        return [o.id for p in self.principles for o in p.outcomes]


@dataclass(frozen=True)
class ProfileRequirement:
    outcome_id: str
    baseline_level: str
    enhanced_level: str

    def level_for(self, profile: AssuranceProfile) -> str:
        if profile == AssuranceProfile.ENHANCED:
            return self.enhanced_level
        return self.baseline_level


@dataclass(frozen=True)
class CafFramework:
    """Read-only CAF catalog."""

    framework_id: str
    framework_name: str
    objectives: Tuple[Objective, ...]
    profile_requirements: Tuple[ProfileRequirement, ...] = ()

    def iter_outcomes(self) -> Iterable[Outcome]:
        for objective in self.objectives:
            for principle in objective.principles:
                yield from principle.outcomes

    @property
    def outcome_ids(self) -> List[str]:
        return [o.id for o in self.iter_outcomes()]

    def get_outcome(self, outcome_id: str) -> Outcome:
        for outcome in self.iter_outcomes():
            if outcome.id == outcome_id:
                return outcome
        raise ValueError(f"Outcome '{outcome_id}' not found in {self.framework_name}")

    def get_principle(self, principle_id: str) -> Principle:
        for objective in self.objectives:
            for principle in objective.principles:
                if principle.id == principle_id:
                    return principle
        raise ValueError(f"Principle '{principle_id}' not found in {self.framework_name}")

    def get_objective(self, objective_id: str) -> Objective:
        for objective in self.objectives:
            if objective.id == objective_id:
                return objective
        raise ValueError(f"Objective '{objective_id}' not found in {self.framework_name}")

    def resolver(self) -> "ProfileRequirementResolver":
        return ProfileRequirementResolver(self.profile_requirements)


class ProfileRequirementResolver:
    """Maps (outcome, assurance profile) to the required achievement level.

    Outcomes missing from the requirement table resolve to None and are not
    scoreable.
    """

    def __init__(self, requirements: Iterable[ProfileRequirement]):
        table: Dict[str, ProfileRequirement] = {}
        for req in requirements:
            for level in (req.baseline_level, req.enhanced_level):
                AchievementLevel(level)
            if req.outcome_id in table:
                raise CatalogError(
                    f"Duplicate profile requirement for outcome '{req.outcome_id}'"
                )
            table[req.outcome_id] = req
        self._table = table

    def __contains__(self, outcome_id: str) -> bool:
        return outcome_id in self._table

    def required_level(self, outcome_id: str, profile) -> Optional[str]:
        """Return the required level string, or None if the outcome is unlisted."""
        req = self._table.get(outcome_id)
        if req is None:
            return None
        return req.level_for(AssuranceProfile.parse(profile))

    def is_scoreable(self, outcome_id: str, profile) -> bool:
        level = self.required_level(outcome_id, profile)
        return level is not None and level != AchievementLevel.NOT_ACHIEVED.value


# ---------------------------------------------------------------------------
# Catalog loading
# ---------------------------------------------------------------------------

def framework_from_dict(data: dict, source: str = "<dict>") -> CafFramework:
    """Build a CafFramework from the catalog JSON structure."""
    objectives_data = data.get("objectives")
    if not isinstance(objectives_data, list) or not objectives_data:
        raise CatalogError(f"Catalog {source} has no objectives", catalog_path=source)

    try:
        objectives = tuple(
            Objective(
                id=obj["id"],
                title=obj.get("title", ""),
                principles=tuple(
                    Principle(
                        id=pr["id"],
                        name=pr.get("name", ""),
                        description=pr.get("description", ""),
                        outcomes=tuple(
                            Outcome(
                                id=oc["id"],
                                name=oc.get("name", ""),
                                description=oc.get("description", ""),
                                evidence=tuple(oc.get("evidence") or ()),
                            )
                            for oc in pr.get("outcomes", [])
                        ),
                    )
                    for pr in obj.get("principles", [])
                ),
            )
            for obj in objectives_data
        )
        requirements = tuple(
            ProfileRequirement(
                outcome_id=req["outcome_id"],
                baseline_level=req["baseline_level"],
                enhanced_level=req["enhanced_level"],
            )
            for req in data.get("profile_requirements", [])
        )
    except KeyError as e:
        raise CatalogError(
            f"Catalog {source} entry missing field {e}", catalog_path=source
        ) from e

    framework = CafFramework(
        framework_id=data.get("framework_id", "ncsc_caf"),
        framework_name=data.get("framework_name", "NCSC Cyber Assessment Framework"),
        objectives=objectives,
        profile_requirements=requirements,
    )

    outcome_ids = framework.outcome_ids
    if len(outcome_ids) != len(set(outcome_ids)):
        raise CatalogError(f"Catalog {source} has duplicate outcome ids", catalog_path=source)
    unknown = [r.outcome_id for r in requirements if r.outcome_id not in set(outcome_ids)]
    if unknown:
        logger.warning(
            "Profile requirements reference outcomes not in catalog: %s",
            ", ".join(unknown),
        )
    return framework


@lru_cache(maxsize=8)
def _load_framework_cached(catalog_path: Path) -> CafFramework:
    if not catalog_path.exists():
        raise FileNotFoundError(
            f"Catalog not found: {catalog_path}\n"
            "Expected: context/compliance/ncsc_caf_framework.json"
        )
    with open(catalog_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise CatalogError(
                f"Catalog {catalog_path} is not valid JSON: {e}",
                catalog_path=str(catalog_path),
            ) from e
    framework = framework_from_dict(data, source=str(catalog_path))
    logger.debug(
        "Loaded %s: %d objectives, %d outcomes, %d profile requirements",
        framework.framework_name, len(framework.objectives),
        len(framework.outcome_ids), len(framework.profile_requirements),
    )
    return framework


def load_framework(catalog_path: Optional[Path] = None) -> CafFramework:
    """Load the CAF catalog. Defaults to the configured catalog path."""
    if catalog_path is None:
        catalog_path = resolve_catalog_path(load_config())
    return _load_framework_cached(Path(catalog_path).resolve())


def summarize_framework(framework: CafFramework) -> Dict:
    """Catalog summary with per-outcome profile levels."""
    resolver = framework.resolver()
    return {
        "framework_id": framework.framework_id,
        "framework_name": framework.framework_name,
        "objectives": [
            {
                "id": obj.id,
                "title": obj.title,
                "principles": [
                    {
                        "id": pr.id,
                        "name": pr.name,
                        "outcomes": [
                            {
                                "id": oc.id,
                                "name": oc.name,
                                "baseline_level": resolver.required_level(oc.id, "Baseline"),
                                "enhanced_level": resolver.required_level(oc.id, "Enhanced"),
                            }
                            for oc in pr.outcomes
                        ],
                    }
                    for pr in obj.principles
                ],
            }
            for obj in framework.objectives
        ],
    }


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main():
    parser = argparse.ArgumentParser(description="NCSC CAF catalog lookup")
    parser.add_argument("--catalog", type=Path, help="Catalog JSON override")
    parser.add_argument("--config", type=Path, help="Config YAML override")
    parser.add_argument("--outcome", help="Show the required level for one outcome")
    parser.add_argument("--profile", help="Assurance profile (Baseline | Enhanced)")
    parser.add_argument("--json", action="store_true", help="JSON output")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
        configure_logging(config)
        set_correlation_id(generate_correlation_id())
        framework = load_framework(args.catalog or resolve_catalog_path(config))
        if args.outcome:
            profile = AssuranceProfile.parse(
                args.profile or config["compliance"]["default_profile"]
            )
            outcome = framework.get_outcome(args.outcome)
            level = framework.resolver().required_level(outcome.id, profile)
            result = {
                "outcome_id": outcome.id,
                "name": outcome.name,
                "profile": profile.value,
                "required_level": level,
                "evidence": list(outcome.evidence),
            }
            if args.json:
                print(json.dumps(result, indent=2))
            else:
                print(f"{outcome.id}: {outcome.name}")
                print(f"  Profile: {profile.value}")
                print(f"  Required: {level or 'not scoreable'}")
                for item in outcome.evidence:
                    print(f"    - {item}")
            return

        summary = summarize_framework(framework)
        if args.json:
            print(json.dumps(summary, indent=2))
        else:
            print(f"{summary['framework_name']}")
            for obj in summary["objectives"]:
                print(f"  Objective {obj['id']}: {obj['title']}")
                for pr in obj["principles"]:
                    print(f"    {pr['id']}: {pr['name']} ({len(pr['outcomes'])} outcomes)")
    except (FileNotFoundError, ValueError, CafTrackError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
