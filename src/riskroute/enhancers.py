"""Optional enhancer discovery.

Two kinds of enhancer can be installed alongside riskroute and are found
through entry points:

    riskroute.structure_analyzers  -> StructureAnalyzer (replaces regex counts)
    riskroute.routers              -> LearnedRouter (replaces heuristic routing)

Each entry point names a class or factory; it is called with no arguments.
Probing happens once, when a RuntimeContext is created. An enhancer that
fails to load is treated as absent.

Usage:
    context = RuntimeContext.create(load_config())
    if context.enhancers.router is not None:
        ...
"""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib.metadata import entry_points
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from .config import DEFAULT_CONFIG, RiskRouteConfig
from .logging_config import get_logger

if TYPE_CHECKING:
    from .routing.learned import LearnedRouter
    from .structure.base import StructureAnalyzer

logger = get_logger(__name__)

STRUCTURE_GROUP = "riskroute.structure_analyzers"
ROUTER_GROUP = "riskroute.routers"


@dataclass
class Provenance:
    """Which implementation produced a payload."""

    structure: str = "regex"  # "regex" or the analyzer plugin name
    router: str = "heuristic"  # "heuristic", "learned" or "forced"


@dataclass
class EnhancerCapabilities:
    """Result of probing for optional enhancers."""

    structure_analyzer: Optional[StructureAnalyzer] = None
    structure_name: str = "regex"
    router: Optional[LearnedRouter] = None
    router_name: Optional[str] = None

    @property
    def router_available(self) -> bool:
        return self.router is not None


def _group_entries(group: str) -> List[Any]:
    eps = entry_points()
    if hasattr(eps, "select"):
        return list(eps.select(group=group))
    # Python 3.9 returns a dict of group -> entries
    return list(eps.get(group, []))


def _load_first(group: str, accepts: Callable[[Any], bool]) -> tuple[Optional[Any], Optional[str]]:
    for ep in _group_entries(group):
        try:
            factory = ep.load()
            candidate = factory()
        except Exception as e:
            logger.debug("Enhancer %s in %s failed to load: %s", ep.name, group, e)
            continue
        if not accepts(candidate):
            logger.debug("Enhancer %s in %s has the wrong interface", ep.name, group)
            continue
        return candidate, ep.name
    return None, None


def probe_enhancers() -> EnhancerCapabilities:
    """Look up installed enhancers. The first loadable entry per group wins."""
    from .routing.learned import LearnedRouter
    from .structure.base import StructureAnalyzer

    capabilities = EnhancerCapabilities()

    analyzer, analyzer_name = _load_first(
        STRUCTURE_GROUP, lambda obj: isinstance(obj, StructureAnalyzer)
    )
    if analyzer is not None:
        capabilities.structure_analyzer = analyzer
        capabilities.structure_name = getattr(analyzer, "name", None) or analyzer_name
        logger.info("Using structure analyzer %s", capabilities.structure_name)

    router, router_name = _load_first(ROUTER_GROUP, lambda obj: isinstance(obj, LearnedRouter))
    if router is not None:
        capabilities.router = router
        capabilities.router_name = router_name
        logger.info("Using learned router %s", router_name)

    return capabilities


@dataclass
class RuntimeContext:
    """Process-scoped settings and enhancers, passed to every operation."""

    config: RiskRouteConfig = DEFAULT_CONFIG
    enhancers: EnhancerCapabilities = field(default_factory=EnhancerCapabilities)

    @classmethod
    def create(cls, config: Optional[RiskRouteConfig] = None) -> "RuntimeContext":
        config = config or DEFAULT_CONFIG
        if config.use_enhancers:
            enhancers = probe_enhancers()
        else:
            enhancers = EnhancerCapabilities()
        return cls(config=config, enhancers=enhancers)

    def provenance(self, router: Optional[str] = None) -> Provenance:
        return Provenance(
            structure=self.enhancers.structure_name,
            router=router or "heuristic",
        )
