"""Library for parsing and encoding vCard and iCalendar content lines."""
