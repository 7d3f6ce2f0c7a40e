from enum import StrEnum
from types import MappingProxyType
from typing import Final, Mapping

from ticketflow.core.errors import ConfigurationError, UnknownAnalysisKindError


class AnalysisKind(StrEnum):
    TRANSCRIPTION = "transcription"
    LANGUAGE_COMPLEXITY = "language-complexity"
    BACKGROUND_ACTORS = "background-actors"
    EMOTIONAL_ANALYSIS = "emotional-analysis"
    LANGUAGE_ERRORS = "language-errors"
    TARGET_GROUP = "target-group"
    AUDIO = "audio"
    AUDIO_GAPS = "audio-gaps"
    NOISE_DETECTION = "noise-detection"
    QUALITY_SUMMARY = "quality-summary"
    METRICS = "metrics"


_DEPENDENCIES: Final[dict[AnalysisKind, tuple[AnalysisKind, ...]]] = {
    AnalysisKind.TRANSCRIPTION: (),
    AnalysisKind.LANGUAGE_COMPLEXITY: (AnalysisKind.TRANSCRIPTION,),
    AnalysisKind.BACKGROUND_ACTORS: (),
    AnalysisKind.EMOTIONAL_ANALYSIS: (AnalysisKind.TRANSCRIPTION,),
    AnalysisKind.LANGUAGE_ERRORS: (AnalysisKind.TRANSCRIPTION,),
    AnalysisKind.TARGET_GROUP: (AnalysisKind.TRANSCRIPTION,),
    AnalysisKind.AUDIO: (),
    AnalysisKind.AUDIO_GAPS: (),
    AnalysisKind.NOISE_DETECTION: (),
    AnalysisKind.QUALITY_SUMMARY: (
        AnalysisKind.TRANSCRIPTION,
        AnalysisKind.AUDIO_GAPS,
        AnalysisKind.NOISE_DETECTION,
    ),
    AnalysisKind.METRICS: (AnalysisKind.TRANSCRIPTION,),
}


def _find_cycle(graph: Mapping[AnalysisKind, tuple[AnalysisKind, ...]]) -> list[AnalysisKind] | None:
    visiting: list[AnalysisKind] = []
    done: set[AnalysisKind] = set()

    def visit(kind: AnalysisKind) -> list[AnalysisKind] | None:
        if kind in done:
            return None
        if kind in visiting:
            return visiting[visiting.index(kind):] + [kind]
        visiting.append(kind)
        for dep in graph.get(kind, ()):
            cycle = visit(dep)
            if cycle:
                return cycle
        visiting.pop()
        done.add(kind)
        return None

    for kind in graph:
        cycle = visit(kind)
        if cycle:
            return cycle
    return None


class AnalysisCatalog:
    """
    Read-only registry of analysis kinds and what each one depends on.

    The mapping is validated on construction: every dependency must be
    registered and the dependency relation must be acyclic.
    """

    def __init__(self, dependencies: Mapping[AnalysisKind, tuple[AnalysisKind, ...]]) -> None:
        frozen: dict[AnalysisKind, tuple[AnalysisKind, ...]] = {}
        for kind, deps in dependencies.items():
            kind = AnalysisKind(kind)
            unique = tuple(dict.fromkeys(AnalysisKind(dep) for dep in deps))
            if kind in unique:
                raise ConfigurationError(f"Analysis {kind} depends on itself")
            frozen[kind] = unique

        for kind, deps in frozen.items():
            missing = [dep for dep in deps if dep not in frozen]
            if missing:
                raise ConfigurationError(
                    f"Analysis {kind} depends on unregistered kinds: {', '.join(missing)}"
                )

        cycle = _find_cycle(frozen)
        if cycle:
            raise ConfigurationError(f"Dependency cycle: {' -> '.join(cycle)}")

        self._dependencies = MappingProxyType(frozen)

    def __contains__(self, kind: object) -> bool:
        return kind in self._dependencies

    def parse(self, value: str) -> AnalysisKind:
        try:
            kind = AnalysisKind(value)
        except ValueError as e:
            raise UnknownAnalysisKindError(str(value)) from e
        if kind not in self._dependencies:
            raise UnknownAnalysisKindError(kind.value)
        return kind

    def dependencies(self, kind: str) -> tuple[AnalysisKind, ...]:
        return self._dependencies[self.parse(kind)]

    def all_kinds(self) -> tuple[AnalysisKind, ...]:
        return tuple(self._dependencies)

    def as_dict(self) -> dict[str, list[str]]:
        return {kind.value: [dep.value for dep in deps] for kind, deps in self._dependencies.items()}


DEFAULT_CATALOG: Final[AnalysisCatalog] = AnalysisCatalog(_DEPENDENCIES)
