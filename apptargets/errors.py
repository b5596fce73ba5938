from typing import Any, List, Tuple


class ApptargetsError(Exception):
    pass


# A descriptor is missing a required field, declares an unknown type, or
# declares no platforms...
class ConfigurationError(ApptargetsError):
    pass


class ProjectGraphError(ApptargetsError):
    def __init__(self, message: str, product_name: str):
        super().__init__(f"{message} (product name '{product_name}')")
        self.product_name = product_name


class TargetIOError(ApptargetsError, OSError):
    pass


class EntitlementMismatchError(ApptargetsError):
    def __init__(self, key: str, host_value: Any, target_value: Any):
        super().__init__(
            f"cannot reconcile entitlement '{key}': "
            f"host has {host_value!r}, target has {target_value!r}"
        )
        self.key = key
        self.host_value = host_value
        self.target_value = target_value


# Runtime failure of the shared storage container, e.g. the app group
# entitlement was never provisioned for the suite...
class StorageIOError(ApptargetsError, OSError):
    pass


class GenerationFailed(ApptargetsError):
    def __init__(self, errors: List[Tuple[str, Exception]]):
        lines = [f"{name}: {error}" for name, error in errors]
        super().__init__(
            f"{len(errors)} target(s) failed to generate:\n" + "\n".join(lines)
        )
        self.errors = errors
