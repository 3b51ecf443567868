# Scheduled jobs
