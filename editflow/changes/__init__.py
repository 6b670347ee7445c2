"""Change model, application engine and change reports."""

from .models import (
    Change,
    ChangeOperation,
    ModificationType,
    InvalidChangeError,
    MixedChangeBatchError,
    group_changes_by_file,
    validate_change_batch,
)
from .apply import ChangeApplier, ChangeCommitError, FileRewriter, StagedWrite
from .report import build_changes_report, format_changes, write_changes_report
