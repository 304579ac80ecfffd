from deploy_on_save.core.parsers import (
    AURA_DEFINITION,
    LIGHTNING_COMPONENT_RESOURCE,
    STATIC_RESOURCE,
    get_aura_def_type,
    get_bundle_name,
    get_filename,
    get_lwc_def_type,
    get_tooling_type,
    to_unix,
)
from deploy_on_save.models import (
    Artifact,
    AuraArtifact,
    ContainerArtifact,
    LwcArtifact,
    StaticResourceArtifact,
    TextDocument,
)


def classify(document: TextDocument) -> Artifact | None:
    """Map a document to the artifact kind that decides how it is deployed.

    Returns ``None`` for files that are not deployable on their own.
    """
    file_name = document.file_name
    tooling_type = get_tooling_type(file_name)
    if tooling_type is None:
        return None

    if tooling_type == AURA_DEFINITION:
        aura_def_type = get_aura_def_type(file_name)
        if aura_def_type is None:
            return None
        return AuraArtifact(
            bundle_name=get_bundle_name(file_name),
            def_type=aura_def_type,
            file_name=get_filename(file_name),
        )

    if tooling_type == LIGHTNING_COMPONENT_RESOURCE:
        lwc_def_type = get_lwc_def_type(file_name)
        if lwc_def_type is None:
            return None
        return LwcArtifact(
            bundle_name=get_bundle_name(file_name),
            def_type=lwc_def_type,
            file_name=get_filename(file_name),
        )

    if tooling_type == STATIC_RESOURCE:
        return StaticResourceArtifact(name=get_filename(file_name))

    return ContainerArtifact(tooling_type=tooling_type, full_name=get_filename(file_name))


def workspace_relative_path(file_name: str, workspace_folder: str) -> str:
    """Path of ``file_name`` below ``<workspace>/src/``, used for exclusion globs only."""
    base_path = to_unix(workspace_folder).rstrip("/") + "/src/"
    return to_unix(file_name).replace(base_path, "", 1)
