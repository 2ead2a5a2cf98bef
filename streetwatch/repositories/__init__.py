"""레포지토리 패키지: 이슈 저장 계층.

Repository package: In-memory issue storage layer.
Holds the process-wide issue collection that every view is derived from.
"""
