class NotFoundError(Exception):
    """Raised when an operation targets a record that does not exist"""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")
