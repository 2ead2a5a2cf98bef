"""리포팅 코어 환경 설정.

Reporting core settings, read by pydantic-settings from the environment or
the project-root .env file. Tests build their own ``Settings`` instance and
pass it down instead of touching the singleton.
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings

# 프로젝트 루트의 .env (Project-root .env, independent of CWD)
_ENV_FILE: Path = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    """리포팅 코어 설정값.

    Every tunable the core reads: backend location, upload limits, location
    fallback, map defaults, pagination and Axiom shipping.

    Attributes:
        API_BASE_URL: 이슈 백엔드 기본 URL (Base URL of the issue backend API)
        MAX_IMAGE_BYTES: 업로드 이미지 최대 크기 (Upload size ceiling in bytes)
        GEOLOCATION_TIMEOUT_SECONDS: 위치 요청 대기 한도 (Bounded wait for device position)
        FALLBACK_LATITUDE / FALLBACK_LONGITUDE: 위치 실패 시 기본 좌표 (Fallback coordinate)
        MAP_DEFAULT_*: 마커가 없을 때의 지도 기본 뷰 (Default map view with no markers)
    """

    # 앱 메타데이터 (Application metadata)
    APP_NAME: str = "StreetWatch"
    DEBUG: bool = False

    # 이슈 백엔드 연결 (Issue backend connection)
    API_BASE_URL: str = "http://localhost:3000"
    API_TIMEOUT_SECONDS: float = 30.0  # 전송 계층 타임아웃 (Transport timeout)

    # 이미지 검증 (Image validation)
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024  # 5 MiB
    ALLOWED_IMAGE_TYPES: List[str] = ["image/jpeg", "image/jpg", "image/png"]

    # 위치 확인 (Geolocation)
    GEOLOCATION_TIMEOUT_SECONDS: float = 8.0
    FALLBACK_LATITUDE: float = 51.505  # 배포별로 지정 (Set per deployment)
    FALLBACK_LONGITUDE: float = -0.09

    # 분류 라벨 정규화 (Classifier label normalization)
    CATEGORY_LOCALE_QUALIFIERS: List[str] = ["india"]

    # 지도 뷰 (Map view)
    MAP_DEFAULT_LATITUDE: float = 28.6139
    MAP_DEFAULT_LONGITUDE: float = 77.2090
    MAP_DEFAULT_ZOOM: int = 6
    MAP_MAX_ZOOM: int = 15  # 단일 마커 과확대 방지 (Prevents over-zooming)
    MAP_PADDING_RATIO: float = 0.1
    MAP_VIEWPORT_WIDTH_PX: int = 800
    MAP_VIEWPORT_HEIGHT_PX: int = 500

    # 제출 성공 후 자동 초기화 지연 (Cosmetic reset delay after success)
    SUCCESS_RESET_SECONDS: float = 3.0

    # 목록 페이지네이션 (Catalog pagination)
    CATALOG_PAGE_SIZE: int = 20
    CATALOG_MAX_PAGE_SIZE: int = 100

    # Axiom 로깅 설정 (Axiom observability platform settings)
    AXIOM_API_TOKEN: str = ""  # Axiom API 토큰 (API token from Axiom dashboard)
    AXIOM_DATASET: str = ""  # Axiom 데이터셋 이름 (Dataset name for logs)

    model_config = {"env_file": _ENV_FILE, "env_file_encoding": "utf-8"}


# 전역 설정 싱글턴 인스턴스 (Global settings singleton instance)
settings: Settings = Settings()
