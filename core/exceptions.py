# exceptions.py
# Exceções do núcleo de exclusão de conta e dados


class DeletionError(Exception):
    """Classe base para os erros do fluxo de exclusão."""

    def __init__(self, message="Falha no processamento da exclusão."):
        self.message = message
        super().__init__(self.message)


class PersistenceError(DeletionError):
    """O banco de dados não confirmou uma escrita."""

    def __init__(self, message="Não foi possível gravar no banco de dados."):
        super().__init__(message)


class LedgerWriteFailure(PersistenceError):
    """A solicitação pendente não foi registrada (sem id positivo)."""

    def __init__(self, user_id=None, message=None):
        self.user_id = user_id
        if message is None:
            message = f"Falha ao registrar solicitação de exclusão do usuário {user_id}."
        super().__init__(message)


class TransactionFailure(DeletionError):
    """Falha durante a exclusão em cascata; a transação foi desfeita."""

    def __init__(self, message="A exclusão foi desfeita por causa de um erro."):
        super().__init__(message)


class AuthRequired(Exception):
    """Nenhum usuário autenticado na sessão atual."""

    def __init__(self, message="É necessário fazer login."):
        self.message = message
        super().__init__(self.message)
