"""Tools that fetch the daemon's JARs from a POM and build its command line."""