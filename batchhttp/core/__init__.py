SERVICE_NAME = "batchhttp"
