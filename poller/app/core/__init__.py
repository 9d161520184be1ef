SERVICE_NAME = "poller"
