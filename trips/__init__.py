#Marks trips as a Django app (storage for driver trips and matching config).
#Models are not imported here: Django must be configured first (see trips.conf.setup_django).
