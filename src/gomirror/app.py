"""Application wiring: settings plus the component graph built from them."""

import typing as t
from dataclasses import dataclass

from .config.settings import Settings
from .domain.skip_policy import SkipPolicy
from .events import BaseEmitter, EventEmitter
from .infrastructure.http import AiohttpClient
from .infrastructure.logging import get_logger, setup_logging
from .mirror import ArtifactFetcher, CatalogSource, IntegrityVerifier, Reconciler

if t.TYPE_CHECKING:
    import loguru


@dataclass(frozen=True)
class App:
    """Application wiring container.

    Holds the settings and builds mirror components from them, so the CLI
    and tests share one construction path.
    """

    settings: Settings

    def create_client(self) -> AiohttpClient:
        return AiohttpClient(user_agent=self.settings.user_agent)

    def create_policy(self) -> SkipPolicy:
        return SkipPolicy(
            excluded_versions=self.settings.excluded_versions,
            prerelease_markers=self.settings.prerelease_markers,
        )

    def create_catalog_source(
        self, client: AiohttpClient, logger: t.Optional["loguru.Logger"] = None
    ) -> CatalogSource:
        return CatalogSource(
            client,
            url=self.settings.catalog_url,
            timeout=self.settings.catalog_timeout,
            max_body_size=self.settings.max_body_size,
            logger=logger or get_logger("gomirror.catalog"),
        )

    def create_reconciler(
        self,
        client: AiohttpClient,
        emitter: BaseEmitter | None = None,
        logger: t.Optional["loguru.Logger"] = None,
    ) -> Reconciler:
        logger = logger or get_logger("gomirror.mirror")
        verifier = IntegrityVerifier(
            sidecar_suffix=self.settings.sidecar_suffix,
            chunk_size=self.settings.chunk_size,
            logger=logger,
        )
        fetcher = ArtifactFetcher(
            client,
            url_template=self.settings.download_url_template,
            timeout=self.settings.download_timeout,
            max_body_size=self.settings.max_body_size,
            chunk_size=self.settings.chunk_size,
            verifier=verifier,
            verify_downloads=self.settings.verify_downloads,
            logger=logger,
        )
        return Reconciler(
            fetcher,
            root=self.settings.download_dir,
            policy=self.create_policy(),
            verifier=verifier,
            emitter=emitter or EventEmitter(logger),
            logger=logger,
        )


def create_app(settings: Settings | None = None) -> App:
    """Create an `App` with provided settings or defaults and set up logging."""
    settings = settings or Settings()
    setup_logging(settings)
    return App(settings=settings)
