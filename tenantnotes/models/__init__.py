from .storage_item import StorageItem
