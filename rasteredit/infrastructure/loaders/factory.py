from rasteredit.domain.interfaces import IImageSource
from rasteredit.infrastructure.loaders.pil_loader import FileSource
from rasteredit.infrastructure.loaders.url_loader import UrlSource, is_url


def source_for(location: str) -> IImageSource:
    """
    Picks the loader for a file path or an http(s) URL.
    """
    if is_url(location):
        return UrlSource(location)
    return FileSource(location)
