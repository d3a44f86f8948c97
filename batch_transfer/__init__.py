# batch-transfer
# A Python tool to run configured batches of file copy/move tasks

from .models import (
    Action, ActionOutcome, FileCandidate, InfoEvent, LogPolicy,
    NotificationEnvelope, NotificationTrigger, Priority, RunReport, Summary,
    SystemErrorRecord, TaskResult, TaskSpec,
)
from .exceptions import (
    ProcessingError, ValidationError, NotFoundError, FileOperationError,
    SinkError, LogWriteError, EventLogError, TransportError
)
from .file_selector import FileSelector
from .retry import RetryingOperation
from .task_runner import TaskRunner
from .orchestrator import Orchestrator
from .report import ReportAggregator
from .notification import NotificationDecider
from .config import RunConfig, load_config
from .logger import ProgressLogger, LogConfig, create_default_logger, get_default_log_file
from .pipeline import TransferPipeline, run_from_file

__all__ = [
    'Action',
    'ActionOutcome',
    'FileCandidate',
    'InfoEvent',
    'LogPolicy',
    'NotificationEnvelope',
    'NotificationTrigger',
    'Priority',
    'RunReport',
    'Summary',
    'SystemErrorRecord',
    'TaskResult',
    'TaskSpec',
    'ProcessingError',
    'ValidationError',
    'NotFoundError',
    'FileOperationError',
    'SinkError',
    'LogWriteError',
    'EventLogError',
    'TransportError',
    'FileSelector',
    'RetryingOperation',
    'TaskRunner',
    'Orchestrator',
    'ReportAggregator',
    'NotificationDecider',
    'RunConfig',
    'load_config',
    'ProgressLogger',
    'LogConfig',
    'create_default_logger',
    'get_default_log_file',
    'TransferPipeline',
    'run_from_file'
]
