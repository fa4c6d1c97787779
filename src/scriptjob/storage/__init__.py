from scriptjob.storage.global_storage import GlobalStorage
from scriptjob.storage.ports import IGlobalStorage

__all__ = ["GlobalStorage", "IGlobalStorage"]
