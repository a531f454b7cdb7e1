from .session import ReviewSession, SessionReport, load_proposals_file
