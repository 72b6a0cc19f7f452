"""Target application registry, launch strategies and the dispatcher."""
