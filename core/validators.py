import re

MODEL_FILE_EXTENSIONS = (
    ".rvt", ".dwg", ".ifc", ".nwd", ".3ds", ".obj", ".fbx",
    ".step", ".iges", ".stp", ".rfa", ".dwf", ".dgn",
)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

_URN_PAYLOAD = re.compile(r"[A-Za-z0-9+/=_%]+")


def validate_file_ref(file_ref: str) -> bool:
    """
    Accept a translated-model reference.

    Rules are checked in order:
      1. ``urn:`` prefix: the rest must be at least 10 base64-ish characters.
      2. 50+ base64-ish characters without a prefix.
      3. A file name with a known model extension.
      4. Anything of at least 2 characters (sample and test identifiers).
    """
    file_ref = file_ref.strip()

    if file_ref.startswith("urn:"):
        payload = file_ref[len("urn:"):]
        if len(payload) < 10:
            return False
        return _URN_PAYLOAD.fullmatch(payload) is not None

    if len(file_ref) >= 50 and _URN_PAYLOAD.fullmatch(file_ref):
        return True

    if file_ref.lower().endswith(MODEL_FILE_EXTENSIONS):
        return True

    return len(file_ref) >= 2


def project_field_error(name: str, description: str | None, file_id: str) -> str | None:
    """Return the first violated project rule, or None when the fields are acceptable."""
    stripped = name.strip()
    if not stripped:
        return "Project name is required"
    if len(stripped) < NAME_MIN_LENGTH:
        return f"Project name must be at least {NAME_MIN_LENGTH} characters"
    if len(stripped) > NAME_MAX_LENGTH:
        return f"Project name must be at most {NAME_MAX_LENGTH} characters"

    if description and len(description) > DESCRIPTION_MAX_LENGTH:
        return f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters"

    if not file_id.strip():
        return "file_id is required"
    if not validate_file_ref(file_id):
        return "file_id must be a valid file id or URN"

    return None
