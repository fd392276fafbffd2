"""Technology relationship registry.

Groups a primary technology with the skills that partially substitute for
it, organised as domain -> subcategory -> groups. A registry is immutable
once built; scoring functions take one explicitly and fall back to the
process-wide default, so tests can pass an alternate map.
"""

import logging
from collections.abc import Iterator, Mapping
from functools import lru_cache
from types import MappingProxyType

from models.schemas.technology import GroupLocation, TechGroup
from services.errors import RegistryError
from services.skill_normalizer import normalize_skill

logger = logging.getLogger(__name__)

DEFAULT_COMPENSATION = 0.5


def _group(primary: str, related: list[str], compensation: float, context: list[str]) -> dict:
    return {
        "primary": primary,
        "related": tuple(related),
        "compensation": compensation,
        "context": tuple(context),
    }


DEFAULT_TECHNOLOGY_MAP: dict[str, dict[str, list[dict]]] = {
    "frontend": {
        "frameworks": [
            _group("react", ["react-router", "redux", "next.js", "gatsby"], 0.8,
                   ["web development", "ui", "frontend", "spa"]),
            _group("vue", ["vuex", "nuxt.js", "vue-router"], 0.8,
                   ["web development", "ui", "frontend", "spa"]),
            _group("angular", ["rxjs", "ngrx", "angular material"], 0.8,
                   ["web development", "ui", "frontend", "enterprise"]),
        ],
        "libraries": [
            _group("tailwind", ["css", "postcss", "styled-components"], 0.7,
                   ["styling", "ui design", "css framework"]),
            _group("material-ui", ["styled-components", "emotion", "chakra-ui"], 0.7,
                   ["ui components", "design system"]),
        ],
        "tools": [
            _group("webpack", ["babel", "rollup", "vite"], 0.6,
                   ["build tools", "bundling", "optimization"]),
            _group("jest", ["testing-library", "cypress", "enzyme"], 0.6,
                   ["testing", "unit tests", "integration tests"]),
        ],
    },
    "backend": {
        "languages": [
            # express is the usual way node.js experience shows up on a resume
            _group("node.js", ["javascript", "typescript", "deno", "express"], 0.9,
                   ["server", "api", "backend", "javascript runtime"]),
            _group("python", ["django", "flask", "fastapi"], 0.9,
                   ["server", "api", "backend", "scripting"]),
        ],
        "frameworks": [
            _group("express", ["koa", "fastify", "nest.js"], 0.8,
                   ["web framework", "rest api", "middleware"]),
            _group("django", ["django-rest-framework", "flask", "fastapi"], 0.8,
                   ["web framework", "orm", "full-stack"]),
        ],
        "databases": [
            _group("postgresql", ["mysql", "sql", "relational database"], 0.8,
                   ["database", "sql", "data storage"]),
            _group("mongodb", ["mongoose", "nosql", "document database"], 0.8,
                   ["database", "nosql", "data storage"]),
        ],
    },
    "devops": {
        "core": [
            _group("docker", ["kubernetes", "containerization", "docker-compose"], 0.8,
                   ["containers", "deployment", "infrastructure"]),
            _group("aws", ["ec2", "s3", "lambda", "cloud"], 0.8,
                   ["cloud", "infrastructure", "deployment"]),
            _group("ci/cd", ["jenkins", "github actions", "gitlab ci"], 0.7,
                   ["automation", "deployment", "testing"]),
        ],
    },
    "mobile": {
        "core": [
            _group("react-native", ["mobile development", "ios", "android"], 0.8,
                   ["mobile", "cross-platform", "app development"]),
            _group("flutter", ["dart", "mobile development", "cross-platform"], 0.8,
                   ["mobile", "cross-platform", "app development"]),
        ],
    },
}


class TechnologyRegistry:
    """Immutable domain -> subcategory -> TechGroup lookup."""

    def __init__(self, mapping: Mapping[str, Mapping[str, list]]):
        built: dict[str, MappingProxyType] = {}
        for domain, subcategories in mapping.items():
            subs: dict[str, tuple[TechGroup, ...]] = {}
            for subcategory, groups in subcategories.items():
                parsed = tuple(
                    g if isinstance(g, TechGroup) else TechGroup(**g) for g in groups
                )
                self._validate(domain, subcategory, parsed)
                subs[subcategory] = parsed
            built[domain] = MappingProxyType(subs)
        self._map = MappingProxyType(built)

    @staticmethod
    def _validate(domain: str, subcategory: str, groups: tuple[TechGroup, ...]) -> None:
        primaries = [g.primary for g in groups]
        duplicates = {p for p in primaries if primaries.count(p) > 1}
        if duplicates:
            raise RegistryError(
                f"{domain}/{subcategory}: primary declared more than once: {sorted(duplicates)}"
            )
        for group in groups:
            clash = set(group.related) & (set(primaries) - {group.primary})
            if clash:
                raise RegistryError(
                    f"{domain}/{subcategory}: {group.primary!r} lists another group's "
                    f"primary as related: {sorted(clash)}"
                )

    # -- iteration ----------------------------------------------------------

    @property
    def domains(self) -> tuple[str, ...]:
        return tuple(self._map)

    def iter_groups(self) -> Iterator[GroupLocation]:
        for domain, subcategories in self._map.items():
            for subcategory, groups in subcategories.items():
                for group in groups:
                    yield GroupLocation(domain=domain, subcategory=subcategory, group=group)

    # -- lookups ------------------------------------------------------------

    def get_skills(self, domain: str, subcategory: str | None = None) -> list[str]:
        """Every primary and related skill under a domain (or one subcategory)."""
        subcategories = self._map.get(domain)
        if not subcategories:
            return []
        if subcategory is not None:
            groups = subcategories.get(subcategory, ())
        else:
            groups = tuple(g for gs in subcategories.values() for g in gs)
        return list(dict.fromkeys(s for g in groups for s in g.members))

    def find_group_for_skill(self, skill: str) -> GroupLocation | None:
        """First group, in declaration order, whose primary or related list holds the skill."""
        normalized = normalize_skill(skill)
        if not normalized:
            return None
        for location in self.iter_groups():
            group = location.group
            if group.primary == normalized or normalized in group.related:
                return location
        return None

    def get_compensation_factor(self, skill: str) -> float:
        location = self.find_group_for_skill(skill)
        return location.group.compensation if location else DEFAULT_COMPENSATION

    def get_skill_context(self, skill: str) -> list[str]:
        location = self.find_group_for_skill(skill)
        return list(location.group.context) if location else []

    def get_related_skills(self, skill: str) -> list[str]:
        """Skills sharing the domain and subcategory, excluding the skill itself."""
        location = self.find_group_for_skill(skill)
        if location is None:
            return []
        normalized = normalize_skill(skill)
        return [
            s for s in self.get_skills(location.domain, location.subcategory)
            if s != normalized
        ]

    def are_skills_related(self, skill_a: str, skill_b: str) -> bool:
        """Coarse relatedness: both skills resolve to the same domain and subcategory."""
        loc_a = self.find_group_for_skill(skill_a)
        loc_b = self.find_group_for_skill(skill_b)
        if loc_a is None or loc_b is None:
            return False
        return (loc_a.domain, loc_a.subcategory) == (loc_b.domain, loc_b.subcategory)

    def are_same_group(self, skill_a: str, skill_b: str) -> bool:
        loc_a = self.find_group_for_skill(skill_a)
        loc_b = self.find_group_for_skill(skill_b)
        return loc_a is not None and loc_b is not None and loc_a == loc_b

    def group_members(self, skill: str) -> tuple[str, ...]:
        location = self.find_group_for_skill(skill)
        return location.group.members if location else ()


@lru_cache(maxsize=1)
def get_default_registry() -> TechnologyRegistry:
    """Build the default registry once per process."""
    registry = TechnologyRegistry(DEFAULT_TECHNOLOGY_MAP)
    logger.debug("Technology registry built with %d domains", len(registry.domains))
    return registry
