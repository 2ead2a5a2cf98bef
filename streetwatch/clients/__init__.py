"""외부 API 클라이언트 패키지.

External API clients: HTTP transport to the issue backend.
"""
