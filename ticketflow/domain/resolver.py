from typing import Iterable

from ticketflow.domain.catalog import AnalysisCatalog, AnalysisKind


class DependencyResolver:
    """
    Expands requested analysis kinds into everything that has to run.

    Output order is the requested kind first, then its dependencies depth
    first. Each kind appears once; the first occurrence wins.
    """

    def __init__(self, catalog: AnalysisCatalog) -> None:
        self._catalog = catalog

    def expand(self, kind: str) -> tuple[AnalysisKind, ...]:
        return self.close((kind,))

    def close(self, kinds: Iterable[str]) -> tuple[AnalysisKind, ...]:
        # Parse everything up front so a bad kind fails before any output exists.
        roots = [self._catalog.parse(kind) for kind in kinds]

        ordered: dict[AnalysisKind, None] = {}

        def visit(kind: AnalysisKind) -> None:
            if kind in ordered:
                return
            ordered[kind] = None
            for dep in self._catalog.dependencies(kind):
                visit(dep)

        for root in roots:
            visit(root)
        return tuple(ordered)

    def expand_all(self) -> tuple[AnalysisKind, ...]:
        return self.close(self._catalog.all_kinds())
