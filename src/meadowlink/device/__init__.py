"""
The device package holds the session with a single board: the command dispatcher, the file
inventory cache and the deployment operations built on top of them.
"""
