"""리포팅 컨텍스트: 한 세션의 구성 요소 묶음.

Reporting context: wires the components of one reporting session:
session, collection, API client, pipeline, and derived views.
"""

from streetwatch.clients.issue_api_client import IssueApi, IssueApiClient
from streetwatch.config import Settings, settings as default_settings
from streetwatch.repositories.issue_collection import IssueCollection
from streetwatch.services.geo_locator import GeoLocator, PositionProvider
from streetwatch.services.image_url_resolver import ImageUrlResolver
from streetwatch.services.issue_service import IssueService
from streetwatch.services.map_projector import MapProjector
from streetwatch.services.media_validator import MediaValidator
from streetwatch.services.report_catalog import ReportCatalog
from streetwatch.services.session_context import SessionContext
from streetwatch.services.submission_pipeline import IssueSubmissionPipeline
from streetwatch.services.view_cache import ViewCache


class ReportingContext:
    """세션 단위 의존성 컨테이너.

    Dependency container for one reporting session. ``api`` and
    ``position_provider`` may be replaced (e.g. by test fakes).
    """

    def __init__(
        self,
        config: Settings | None = None,
        api: IssueApi | None = None,
        position_provider: PositionProvider | None = None,
        session: SessionContext | None = None,
    ) -> None:
        self.config: Settings = config or default_settings
        self.session: SessionContext = session or SessionContext()
        self.collection: IssueCollection = IssueCollection()
        self._owned_client: IssueApiClient | None = None
        if api is None:
            self._owned_client = IssueApiClient(self.session, self.config)
            api = self._owned_client
        self.api: IssueApi = api

        self.resolver: ImageUrlResolver = ImageUrlResolver(self.config.API_BASE_URL)
        self.projector: MapProjector = MapProjector(self.config)
        self.catalog: ReportCatalog = ReportCatalog(self.resolver, self.config)
        self.views: ViewCache = ViewCache(self.collection, self.projector, self.catalog)
        self.issues: IssueService = IssueService(self.collection, self.api, self.config)
        self.pipeline: IssueSubmissionPipeline = IssueSubmissionPipeline(
            self.collection,
            self.api,
            self.session,
            validator=MediaValidator(self.config),
            locator=GeoLocator(position_provider, self.config),
            config=self.config,
        )

    async def aclose(self) -> None:
        self.views.close()
        if self._owned_client is not None:
            await self._owned_client.aclose()
