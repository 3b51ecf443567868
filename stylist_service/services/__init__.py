# External services
