"""Tests for the reconciliation loop."""

import hashlib
from pathlib import Path

import pytest
from aioresponses import aioresponses

from gomirror.domain.catalog import Catalog
from gomirror.domain.exceptions import DirectoryConflictError
from gomirror.domain.skip_policy import SkipPolicy
from gomirror.events import (
    ArtifactDownloadedEvent,
    ArtifactDownloadingEvent,
    ArtifactFailedEvent,
    ArtifactSatisfiedEvent,
    ArtifactSkippedEvent,
    ReleaseSkippedEvent,
)
from gomirror.mirror.fetcher import FetchOutcome, FetchResult

pytestmark = pytest.mark.usefixtures("blockbuster")

TEMPLATE = "https://dl.example.com/{filename}"
CONTENT = b"x" * 1000
FILENAME = "go1.21.0.linux-amd64.tar.gz"
URL = TEMPLATE.format(filename=FILENAME)


def _collect(emitter, *event_types: str) -> list:
    events: list = []
    for event_type in event_types:
        emitter.on(event_type, events.append)
    return events


@pytest.fixture
def single_artifact_catalog(make_release, make_artifact) -> Catalog:
    artifact = make_artifact(FILENAME, size=1000, sha256="ab" * 32)
    return Catalog((make_release("go1.21.0", [artifact]),))


class TestFreshDownload:
    @pytest.mark.asyncio
    async def test_creates_directory_downloads_and_writes_known_hash(
        self, make_reconciler, real_emitter, single_artifact_catalog, tmp_path: Path
    ) -> None:
        downloaded = _collect(real_emitter, "artifact.downloaded")
        reconciler = make_reconciler(emitter=real_emitter)

        with aioresponses() as mock:
            mock.get(URL, status=200, body=CONTENT)
            summary = await reconciler.run(single_artifact_catalog)

        version_dir = tmp_path / "go1.21.0"
        assert version_dir.is_dir()
        assert (version_dir / FILENAME).read_bytes() == CONTENT
        assert (version_dir / f"{FILENAME}.sha").read_text() == "ab" * 32
        assert [str(url) for _, url in mock.requests] == [URL]
        assert summary.artifacts_downloaded == 1
        assert len(downloaded) == 1
        assert isinstance(downloaded[0], ArtifactDownloadedEvent)
        assert downloaded[0].path == str(version_dir / FILENAME)
        assert downloaded[0].sidecar_path == str(version_dir / f"{FILENAME}.sha")

    @pytest.mark.asyncio
    async def test_pending_download_event_carries_expected_hash(
        self, make_reconciler, real_emitter, single_artifact_catalog
    ) -> None:
        downloading = _collect(real_emitter, "artifact.downloading")

        with aioresponses() as mock:
            mock.get(URL, body=CONTENT)
            await make_reconciler(emitter=real_emitter).run(single_artifact_catalog)

        assert len(downloading) == 1
        assert isinstance(downloading[0], ArtifactDownloadingEvent)
        assert downloading[0].url == URL
        assert downloading[0].expected_hash == "ab" * 32


class TestAlreadyDownloaded:
    @pytest.mark.asyncio
    async def test_file_and_sidecar_present_means_no_network_call(
        self, make_reconciler, real_emitter, single_artifact_catalog, tmp_path: Path
    ) -> None:
        version_dir = tmp_path / "go1.21.0"
        version_dir.mkdir()
        (version_dir / FILENAME).write_bytes(CONTENT)
        (version_dir / f"{FILENAME}.sha").write_text("ab" * 32)
        satisfied = _collect(real_emitter, "artifact.satisfied")

        with aioresponses() as mock:
            summary = await make_reconciler(emitter=real_emitter).run(
                single_artifact_catalog
            )

        assert mock.requests == {}
        assert summary.artifacts_satisfied == 1
        assert summary.artifacts_downloaded == 0
        assert len(satisfied) == 1
        assert isinstance(satisfied[0], ArtifactSatisfiedEvent)
        assert satisfied[0].filename == FILENAME

    @pytest.mark.asyncio
    async def test_second_run_downloads_nothing(
        self, make_reconciler, make_release, make_artifact
    ) -> None:
        contents = {f"go1.21.0.{n}.tar.gz": bytes([n]) * (100 + n) for n in range(3)}
        artifacts = [
            make_artifact(name, content=body) for name, body in contents.items()
        ]
        catalog = Catalog((make_release("go1.21.0", artifacts),))
        reconciler = make_reconciler()

        with aioresponses() as mock:
            for name, body in contents.items():
                mock.get(TEMPLATE.format(filename=name), body=body)
            first = await reconciler.run(catalog)

        with aioresponses() as mock:
            second = await reconciler.run(catalog)

        assert first.artifacts_downloaded == 3
        assert second.artifacts_downloaded == 0
        assert second.artifacts_satisfied == 3
        assert mock.requests == {}


class TestMissingSidecar:
    @pytest.mark.asyncio
    async def test_matching_file_is_hashed_and_kept(
        self, make_reconciler, make_release, make_artifact, tmp_path: Path
    ) -> None:
        artifact = make_artifact(FILENAME, content=CONTENT)
        version_dir = tmp_path / "go1.21.0"
        version_dir.mkdir()
        (version_dir / FILENAME).write_bytes(CONTENT)

        with aioresponses() as mock:
            summary = await make_reconciler().run(
                Catalog((make_release("go1.21.0", [artifact]),))
            )

        assert mock.requests == {}
        assert summary.artifacts_satisfied == 1
        assert (version_dir / f"{FILENAME}.sha").read_text() == (
            hashlib.sha256(CONTENT).hexdigest()
        )

    @pytest.mark.asyncio
    async def test_mismatching_file_is_downloaded_again(
        self, make_reconciler, single_artifact_catalog, tmp_path: Path
    ) -> None:
        version_dir = tmp_path / "go1.21.0"
        version_dir.mkdir()
        (version_dir / FILENAME).write_bytes(b"y" * 1000)

        with aioresponses() as mock:
            mock.get(URL, body=CONTENT)
            summary = await make_reconciler().run(single_artifact_catalog)

        assert [str(url) for _, url in mock.requests] == [URL]
        assert summary.artifacts_downloaded == 1
        assert (version_dir / FILENAME).read_bytes() == CONTENT
        assert (version_dir / f"{FILENAME}.sha").read_text() == "ab" * 32


class TestSkipping:
    @pytest.mark.asyncio
    async def test_skipped_release_gets_no_directory(
        self, make_reconciler, real_emitter, make_release, make_artifact, tmp_path
    ) -> None:
        catalog = Catalog(
            (
                make_release("go1.22rc1", [make_artifact()]),
                make_release("go1.0.1", [make_artifact()]),
            )
        )
        skipped = _collect(real_emitter, "release.skipped")
        reconciler = make_reconciler(
            emitter=real_emitter, policy=SkipPolicy(excluded_versions=("go1.0.1",))
        )

        with aioresponses() as mock:
            summary = await reconciler.run(catalog)

        assert mock.requests == {}
        assert list(tmp_path.iterdir()) == []
        assert summary.releases_skipped == 2
        assert [e.version for e in skipped] == ["go1.22rc1", "go1.0.1"]
        assert all(isinstance(e, ReleaseSkippedEvent) for e in skipped)

    @pytest.mark.asyncio
    async def test_unusable_artifacts_are_never_verified_or_fetched(
        self, make_reconciler, real_emitter, make_release, make_artifact, mocker
    ) -> None:
        catalog = Catalog(
            (
                make_release(
                    "go1.21.0",
                    [
                        make_artifact("zero.tar.gz", size=0),
                        make_artifact("nohash.tar.gz", sha256=""),
                    ],
                ),
            )
        )
        skipped = _collect(real_emitter, "artifact.skipped")
        reconciler = make_reconciler(emitter=real_emitter)
        is_satisfied = mocker.spy(reconciler._verifier, "is_satisfied")

        with aioresponses() as mock:
            summary = await reconciler.run(catalog)

        assert mock.requests == {}
        is_satisfied.assert_not_called()
        assert summary.artifacts_skipped == 2
        assert [e.reason for e in skipped] == [
            "declared size is zero",
            "no expected hash",
        ]
        assert all(isinstance(e, ArtifactSkippedEvent) for e in skipped)


class TestFailureIsolation:
    @pytest.mark.asyncio
    async def test_failed_artifact_does_not_stop_siblings(
        self, make_reconciler, real_emitter, make_release, make_artifact, tmp_path
    ) -> None:
        bad = make_artifact("bad.tar.gz", content=CONTENT)
        good = make_artifact("good.tar.gz", content=CONTENT)
        catalog = Catalog((make_release("go1.21.0", [bad, good]),))
        failed = _collect(real_emitter, "artifact.failed")

        with aioresponses() as mock:
            mock.get(TEMPLATE.format(filename="bad.tar.gz"), status=404)
            mock.get(TEMPLATE.format(filename="good.tar.gz"), body=CONTENT)
            summary = await make_reconciler(emitter=real_emitter).run(catalog)

        assert summary.artifacts_failed == 1
        assert summary.artifacts_downloaded == 1
        assert not (tmp_path / "go1.21.0" / "bad.tar.gz").exists()
        assert (tmp_path / "go1.21.0" / "good.tar.gz").exists()
        assert len(failed) == 1
        assert isinstance(failed[0], ArtifactFailedEvent)
        assert "HTTP 404" in failed[0].error_message

    @pytest.mark.asyncio
    async def test_directory_conflict_skips_only_that_release(
        self, make_reconciler, make_release, make_artifact, tmp_path, mock_logger
    ) -> None:
        (tmp_path / "go1.20").write_text("not a directory")
        artifact = make_artifact("go1.21.0.tar.gz", content=CONTENT)
        catalog = Catalog(
            (
                make_release("go1.20", [make_artifact("go1.20.tar.gz")]),
                make_release("go1.21.0", [artifact]),
            )
        )

        with aioresponses() as mock:
            mock.get(TEMPLATE.format(filename="go1.21.0.tar.gz"), body=CONTENT)
            summary = await make_reconciler().run(catalog)

        assert (tmp_path / "go1.20").read_text() == "not a directory"
        assert summary.releases_failed == 1
        assert summary.artifacts_downloaded == 1
        assert any(
            "not a directory" in call.args[0]
            for call in mock_logger.error.call_args_list
        )

    @pytest.mark.asyncio
    async def test_unexpected_error_is_contained(
        self, make_reconciler, make_release, make_artifact, mocker
    ) -> None:
        catalog = Catalog(
            (
                make_release(
                    "go1.21.0",
                    [make_artifact("a.tar.gz"), make_artifact("b.tar.gz")],
                ),
            )
        )
        reconciler = make_reconciler()
        ok = FetchResult(
            outcome=FetchOutcome.DOWNLOADED, url="u", path=Path("p"), total_bytes=1
        )
        mocker.patch.object(
            reconciler._fetcher, "fetch", side_effect=[RuntimeError("bug"), ok]
        )

        summary = await reconciler.run(catalog)

        assert summary.artifacts_failed == 1
        assert summary.artifacts_downloaded == 1


class TestEnsureDirectory:
    @pytest.mark.asyncio
    async def test_creates_missing_directory(self, make_reconciler, tmp_path) -> None:
        path = tmp_path / "go1.21.0"
        await make_reconciler().ensure_directory(path)
        assert path.is_dir()

    @pytest.mark.asyncio
    async def test_existing_directory_is_fine(self, make_reconciler, tmp_path) -> None:
        path = tmp_path / "go1.21.0"
        path.mkdir()
        (path / "keep").write_text("kept")

        await make_reconciler().ensure_directory(path)

        assert (path / "keep").read_text() == "kept"

    @pytest.mark.asyncio
    async def test_file_in_the_way_raises_conflict(
        self, make_reconciler, tmp_path
    ) -> None:
        path = tmp_path / "go1.21.0"
        path.write_text("x")

        with pytest.raises(DirectoryConflictError):
            await make_reconciler().ensure_directory(path)
