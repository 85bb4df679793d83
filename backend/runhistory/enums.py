from enum import Enum


class PaginationState(str, Enum):
    FETCHING = "FETCHING"
    DONE_EMPTY = "DONE_EMPTY"
    DONE_SHORT_PAGE = "DONE_SHORT_PAGE"
    DONE_CAPPED = "DONE_CAPPED"


class PartitionEventKind(str, Enum):
    PARTITION_FETCHED = "PARTITION_FETCHED"
    PARTITION_FAILED = "PARTITION_FAILED"
    TERM_SKIPPED = "TERM_SKIPPED"
