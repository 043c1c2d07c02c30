from .acquire import GitAcquirer, clone_repo
from .activity import GitActivityInspector, last_commit_info
from .base import ActivityInspector, CommitInfo, ContentAcquirer, RequirementExtractor
from .constraints import check_version_constraint, parse_constraint, parse_version
from .extract import TerraformExtractor, parse_terraform_module

__all__ = [
    "ActivityInspector",
    "CommitInfo",
    "ContentAcquirer",
    "GitAcquirer",
    "GitActivityInspector",
    "RequirementExtractor",
    "TerraformExtractor",
    "check_version_constraint",
    "clone_repo",
    "last_commit_info",
    "parse_constraint",
    "parse_terraform_module",
    "parse_version",
]
