from django.dispatch import Signal

# Sent with ``notification=<Notification>`` after a row is stored; a real-time
# push layer subscribes here.
notification_created = Signal()
