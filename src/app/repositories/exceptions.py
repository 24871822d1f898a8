class StoreUnavailable(Exception):
    """The backing store could not be reached or did not answer in time"""
