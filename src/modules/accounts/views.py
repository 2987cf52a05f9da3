"""Account API views."""

from __future__ import annotations

from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.accounts.exceptions import AccountNotFound
from modules.accounts.repositories.django_repository import AccountDjangoRepository
from modules.accounts.serializers import AccountSerializer
from modules.accounts.services import AccountService
from modules.core.exceptions import error_response


class AccountViewSet(GenericViewSet):
    """Read access to accounts through ``AccountService``.

    Lookup by id needs no credentials.
    """

    serializer_class = AccountSerializer
    permission_classes = [AllowAny]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = AccountService(repository=AccountDjangoRepository())

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/account/{pk}"""
        try:
            account = self._service.get_account(pk or "")
        except AccountNotFound as exc:
            return error_response(exc)
        return Response(AccountSerializer(account).data)
