# Canned log content for --demo mode. Each variable is one simulated source, named
# "<variable>.demo" on the command line; lines are emitted one at a time at random
# intervals, as if being appended to a live log file.

demo_source_names = ["web_server.demo", "database.demo", "job_queue.demo"]

web_server = """\
INFO   Listening on port 8080
INFO   Request received from IP: 192.168.0.1
INFO   User authentication succeeded
INFO   Request processed successfully
WARN   Slow response time detected
INFO   Request received from IP: 192.168.0.7
ERROR  Request processed unsuccessfully
INFO   Request received from IP: 192.168.0.1
INFO   Request processed successfully
WARN   Invalid input received: missing required field
INFO   Sending email notification
INFO   Request processed successfully
"""

database = """\
INFO   Database online
DEBUG  Executing scheduled task
DEBUG  Performing database backup
INFO   Backing up 50000 records...
INFO   Backup complete
WARN   Insufficient disk space available
ERROR  Database connection failed
INFO   Database connection restored
DEBUG  Starting data synchronization
INFO   Data synchronization completed
"""

job_queue = """\
INFO   Worker pool started (4 workers)
DEBUG  Job 101 queued
DEBUG  Job 101 started
DEBUG  Job 102 queued
INFO   Job 101 completed
DEBUG  Job 102 started
ERROR  Failed to connect to remote server
WARN   Job 102 retrying (1 of 3)
INFO   Job 102 completed
DEBUG  Queue empty
"""
