class ClusteringInputError(ValueError):
    """Raised when the engine is handed data or parameters it cannot cluster."""


class EmptyLabelError(ClusteringInputError):
    pass


class EmptyVectorError(ClusteringInputError):
    pass


class DuplicateLabelError(ClusteringInputError):
    pass


class InvalidClusterCountError(ClusteringInputError):
    pass
