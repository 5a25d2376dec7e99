'''
Command-line tools built on the argument binder.
'''
