"""
Tag numbering for placeholder runs.

Placeholder ids are unique within a unit, yet the source and the target
segment of one unit share the same numeric range: the target's first
placeholder gets the same id as the source's first placeholder. Editors rely
on that equality to pair source and target tags. Across units the counter
only moves forward, through the staged count.

Rebalancing, per unit:

    begin_source():  source_count = 0; total = max(total, staged)
    allocate(src):   id = total; total += 1; staged += 1; source_count += 1
    begin_target():  total -= source_count
    allocate(tgt):   id = total; total += 1
"""

from dataclasses import dataclass


@dataclass
class TagAllocationState:
    """Counters threaded through the tokenizer for one pass over a document."""
    total: int = 0
    staged: int = 0
    source_count: int = 0

    def begin_source(self) -> None:
        self.source_count = 0
        if self.total < self.staged:
            self.total = self.staged

    def begin_target(self) -> None:
        self.total -= self.source_count

    def begin(self, is_source: bool) -> None:
        if is_source:
            self.begin_source()
        else:
            self.begin_target()

    def allocate(self, is_source: bool) -> int:
        """Consume the next id."""
        tag_id = self.total
        self.total += 1
        if is_source:
            self.staged += 1
            self.source_count += 1
        return tag_id
