SERVICE_NAME = "dispatcher"
