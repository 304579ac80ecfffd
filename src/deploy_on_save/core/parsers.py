from pathlib import PurePosixPath

_AURA_DEF_TYPE_SUFFIXES = (
    ("Controller.js", "CONTROLLER"),
    ("Helper.js", "HELPER"),
    ("Renderer.js", "RENDERER"),
    (".cmp", "COMPONENT"),
    (".app", "APPLICATION"),
    (".evt", "EVENT"),
    (".intf", "INTERFACE"),
    (".css", "STYLE"),
    (".design", "DESIGN"),
    (".svg", "SVG"),
    (".auradoc", "DOCUMENTATION"),
    (".tokens", "TOKENS"),
)

_LWC_DEF_TYPES = frozenset({"js", "html", "css", "svg", "xml"})

_CONTAINER_MEMBER_TYPES = {
    ".cls": "ApexClassMember",
    ".trigger": "ApexTriggerMember",
    ".page": "ApexPageMember",
    ".component": "ApexComponentMember",
}

AURA_DEFINITION = "AuraDefinition"
LIGHTNING_COMPONENT_RESOURCE = "LightningComponentResource"
STATIC_RESOURCE = "StaticResource"


def to_unix(file_name: str) -> str:
    return file_name.replace("\\", "/")


def get_filename(file_name: str) -> str:
    """Return the basename without its last extension (``c.js-meta.xml`` -> ``c.js-meta``)."""
    return PurePosixPath(to_unix(file_name)).stem


def get_bundle_name(file_name: str) -> str:
    return PurePosixPath(to_unix(file_name)).parent.name


def get_aura_def_type(file_name: str) -> str | None:
    base = PurePosixPath(to_unix(file_name)).name
    for suffix, def_type in _AURA_DEF_TYPE_SUFFIXES:
        if base.endswith(suffix):
            return def_type
    return None


def get_lwc_def_type(file_name: str) -> str | None:
    suffix = PurePosixPath(to_unix(file_name)).suffix.lstrip(".").lower()
    return suffix if suffix in _LWC_DEF_TYPES else None


def get_tooling_type(file_name: str) -> str | None:
    path = to_unix(file_name)
    if "/aura/" in path:
        return AURA_DEFINITION
    if "/lwc/" in path:
        return LIGHTNING_COMPONENT_RESOURCE
    if "/staticresources/" in path and path.endswith(".resource"):
        return STATIC_RESOURCE
    return _CONTAINER_MEMBER_TYPES.get(PurePosixPath(path).suffix)


def escape_soql(value: str) -> str:
    """Escape backslashes and single quotes for use inside a SOQL string literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")
