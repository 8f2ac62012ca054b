"""Rules deciding which releases and artifacts are left alone."""

from dataclasses import dataclass

from .catalog import Artifact, Release


@dataclass(frozen=True)
class SkipPolicy:
    """Pure predicates over catalog entries.

    Pre-release detection is a plain substring test on the version string,
    so ``"1.2.0-rcdoc"`` is skipped just like ``"go1.21rc2"``.
    """

    excluded_versions: tuple[str, ...] = ()
    prerelease_markers: tuple[str, ...] = ("beta", "rc")

    def release_skip_reason(self, release: Release) -> str | None:
        """Why ``release`` is skipped, or None when it should be mirrored."""
        if release.version in self.excluded_versions:
            return "version is excluded"
        for marker in self.prerelease_markers:
            if marker and marker in release.version:
                return f"pre-release ({marker!r} in version)"
        return None

    def artifact_skip_reason(self, artifact: Artifact) -> str | None:
        """Why ``artifact`` is skipped, or None when it should be mirrored."""
        if artifact.size == 0:
            return "declared size is zero"
        if not artifact.sha256:
            return "no expected hash"
        return None

    def skip_release(self, release: Release) -> bool:
        return self.release_skip_reason(release) is not None

    def skip_artifact(self, artifact: Artifact) -> bool:
        return self.artifact_skip_reason(artifact) is not None
