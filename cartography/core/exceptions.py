class MalformedDatasetError(Exception):
    """Raised when a dataset cannot be turned into a consistent full graph."""
    def __init__(self, message="Malformed dataset."):
        self.message = message
        super().__init__(self.message)

class NodeNotFoundException(Exception):
    """Raised when a node is not found for a given ID."""
    def __init__(self, message="Node not found."):
        self.message = message
        super().__init__(self.message)
