"""Brain Dump AI: turn free text into tasks, habits, events and sleep schedules."""
