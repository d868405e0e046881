class PipelineError(Exception):
    """Base for every failure that stops a run."""

    fatal = True


class ManifestError(PipelineError):
    pass


class DirectoryError(PipelineError):
    pass


class FetchError(PipelineError):
    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class PlaceholderError(PipelineError):
    pass


class RasterizerUnavailable(PipelineError):
    pass


class RasterizeError(PipelineError):
    def __init__(self, path, reason: str) -> None:
        super().__init__(f"failed to rasterize {path}: {reason}")
        self.path = path
        self.reason = reason


class CompressError(PipelineError):
    fatal = False
