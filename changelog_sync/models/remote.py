"""Values discovered from the remote repository during a publish."""

from dataclasses import dataclass, field


@dataclass
class BranchSet:
    """Result of a branch discovery query."""

    base_branch: str = ""  # Display id of the repository default branch
    available_branches: set[str] = field(default_factory=set)

    def __contains__(self, branch_name: object) -> bool:
        return branch_name in self.available_branches

    @classmethod
    def from_values(cls, values: list[dict]) -> "BranchSet":
        """Create from the `values` array of a branch listing page."""
        branch_set = cls()
        for branch in values:
            display_id = branch.get("displayId", "")
            if branch.get("isDefault"):
                branch_set.base_branch = display_id
            branch_set.available_branches.add(display_id)
        return branch_set
