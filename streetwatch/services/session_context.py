"""세션 컨텍스트: 인증 상태를 명시적으로 전달.

Session context: explicit authentication state for one reporting session.
Replaces the browser-local user/token cache: whoever needs ``is_authenticated()``
receives the same instance by reference.
"""


class SessionContext:
    """한 리포팅 세션의 인증 정보.

    Holds the bearer token issued by the external auth flow and the
    reporter's display name. Credentials themselves are never stored here.
    """

    def __init__(self, access_token: str | None = None, user_name: str | None = None) -> None:
        self._access_token: str | None = access_token
        self._user_name: str | None = user_name

    @property
    def access_token(self) -> str | None:
        return self._access_token

    @property
    def user_name(self) -> str | None:
        return self._user_name

    def is_authenticated(self) -> bool:
        return bool(self._access_token)

    def sign_in(self, access_token: str, user_name: str | None = None) -> None:
        self._access_token = access_token
        self._user_name = user_name

    def sign_out(self) -> None:
        self._access_token = None
        self._user_name = None
