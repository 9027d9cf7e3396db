"""Erros de domínio da agenda.

Cada erro carrega uma mensagem pronta para o usuário (pt-BR) e uma etiqueta
estável (``conflict``/``balance``/``entity``) que o front usa para decidir o
que destacar na tela. O mapeamento para HTTP fica em ``clinica.main``.
"""

from __future__ import annotations

from typing import Literal

ConflictReason = Literal["room", "professional", "client"]
BalanceKind = Literal["package", "advance"]

_CONFLICT_MESSAGES: dict[str, str] = {
    "room": "Conflito: esta sala já está ocupada nesse dia/horário.",
    "professional": "Conflito: o profissional já possui agendamento nesse dia/horário.",
    "client": "Conflito: o cliente já possui agendamento nesse dia/horário.",
}

_BALANCE_MESSAGES: dict[str, str] = {
    "package": (
        "Não foi possível salvar com 'Pacote' marcado: cliente sem saldo de pacote. "
        "Ajuste o saldo na aba Clientes e tente novamente."
    ),
    "advance": (
        "Não foi possível salvar com 'Antecipado' marcado: profissional sem saldo de "
        "antecipados. Ajuste o saldo na aba Profissionais e tente novamente."
    ),
}


class AgendaError(Exception):
    message = "Erro na agenda."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


class SlotConflict(AgendaError):
    def __init__(self, reason: ConflictReason) -> None:
        self.reason = reason
        super().__init__(_CONFLICT_MESSAGES[reason])


class NoBalance(AgendaError):
    def __init__(self, kind: BalanceKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message or _BALANCE_MESSAGES[kind])


class NotFound(AgendaError):
    def __init__(self, entity: str, message: str | None = None) -> None:
        self.entity = entity
        super().__init__(message or f"{entity} não encontrado")


class DuplicateRecord(AgendaError):
    """Cadastro que colide com outro já existente (cpf, email, whats...)."""

    def __init__(self, field: str, existing_id: str, message: str | None = None) -> None:
        self.field = field
        self.existing_id = existing_id
        super().__init__(message or f"Já existe um cadastro com o mesmo {field}.")


class InvalidInput(AgendaError):
    pass


class RemoteError(AgendaError):
    message = "Falha ao gravar. Verifique a conexão e tente novamente."
