"""
리소스 권한 정책.

요청 처리기가 리소스와 인증된 사용자를 로딩한 뒤 이 정책을 호출하고,
거부 결과를 403 응답으로 바꿉니다.
"""
from .authorization import AuthorizationPolicy, Decision, ModifyGround, OperationClass
