from apptargets.storage.bridge import RecordingReloader, StorageBridge, StorageModule
