"""Fixtures for mirror tests."""

import pytest

from gomirror.domain.skip_policy import SkipPolicy
from gomirror.mirror import ArtifactFetcher, IntegrityVerifier, Reconciler

TEMPLATE = "https://dl.example.com/{filename}"


@pytest.fixture
def make_reconciler(http_client, mock_logger, tmp_path):
    """Factory fixture wiring a Reconciler with a real fetcher and verifier."""

    def _make(
        *, emitter=None, policy: SkipPolicy | None = None, **fetcher_kwargs
    ) -> Reconciler:
        verifier = IntegrityVerifier(logger=mock_logger)
        fetcher = ArtifactFetcher(
            http_client,
            url_template=TEMPLATE,
            verifier=verifier,
            logger=mock_logger,
            **fetcher_kwargs,
        )
        return Reconciler(
            fetcher,
            root=tmp_path,
            policy=policy,
            verifier=verifier,
            emitter=emitter,
            logger=mock_logger,
        )

    return _make
