class ValidationError(Exception):
    pass


class EmptyInputError(ValidationError):
    """Raised when a collection the pipeline cannot run without is empty."""

    def __init__(self, what: str):
        self.what = what
        super().__init__(f"Cannot run analysis: no {what} provided")


class DuplicateIdError(ValidationError):
    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind.capitalize()} '{entity_id}' already exists")
