"""서비스 패키지: 비즈니스 로직 계층.

Service package: Business logic layer.
Contains the submission pipeline, the read-derivations (map, catalog),
and the collaborators they consume (geolocation, media validation, session).
"""
