#Order and driver lifecycle transitions used by the dispatcher.
