### COMMENTS
# ============================================
# Konwencja użycia błędów domenowych w projekcie
# ============================================
# - Repozytoria (adaptery):
#     * wykrywają brak rekordów
#     * mapują błędy techniczne (GoogleAPICallError, SQLAlchemyError) na StoreError
#
# - Serwisy:
#     * walidują dane wejściowe (ID zadania) i rzucają TaskValidationError
#
# - UI (HTTP, CLI):
#     * łapie DomainError (lub konkretne klasy) i zwraca krótki komunikat
#     * wszystko inne traktuje jako błąd techniczny (loguje stacktrace, 500)


class DomainError(Exception):
    """Bazowa klasa dla błędów domenowych.
    Umożliwia odróżnienie błędów domeny (logika aplikacji) od błędów technicznych
    spoza projektu. Nie powinna być rzucana bezpośrednio — używaj klas pochodnych.
    """


class TaskValidationError(DomainError):
    """Rzucany, gdy dane wejściowe nie spełniają reguł dla zadania.
    W praktyce: ID zadania nie daje się sparsować jako 64-bitowa liczba całkowita.
    Zawiera komunikat (`message`) oraz nazwę pola (`field`), którego dotyczy błąd.
    """
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(self.__str__())
    def __str__(self):
        return f"invalid {self.field}: {self.message}"


class TaskNotFoundError(DomainError):
    """Rzucany, gdy żądane zadanie nie istnieje w magazynie.
    Występuje przy oznaczaniu zadania jako ukończone (`mark_done()`), bo tylko ta
    operacja wymaga istnienia rekordu.
    """
    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(self.__str__())
    def __str__(self):
        return f"task {self.task_id} does not exist"


class StoreError(DomainError):
    """Błąd techniczny magazynu (sieć, uprawnienia, transakcja) przepakowany przez adapter.
    Oryginalny wyjątek jest dostępny jako `__cause__`.
    """
    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(self.__str__())
    def __str__(self):
        return f"failed to {self.operation}: {self.detail}"


class CredentialsError(DomainError):
    """Rzucany na starcie, gdy nie da się odczytać poświadczeń magazynu z `VCAP_SERVICES`.
    Dla procesu serwera jest to błąd krytyczny (proces kończy się).
    """
