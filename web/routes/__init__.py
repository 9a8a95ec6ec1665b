"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- accounts: 계정과목
- journal: 분개
- periods: 기간 마감
- reports: 시산표 / 원장 / 재무상태표 / 손익계산서
- settings: 표시 설정, 이름 기반 액션 실행
"""
