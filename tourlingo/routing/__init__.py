from .channels import RouteTargets, accepts, find_guide, resolve_targets

__all__ = ["RouteTargets", "accepts", "find_guide", "resolve_targets"]
