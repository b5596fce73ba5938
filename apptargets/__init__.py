from apptargets.config import HostAppConfig
