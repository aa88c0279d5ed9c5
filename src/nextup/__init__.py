"""nextup - calendar agenda and next-event countdown."""
