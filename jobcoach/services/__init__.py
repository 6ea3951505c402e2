"""
Services package.
"""
from jobcoach.services.document_processor import DocumentProcessor, get_document_processor
from jobcoach.services.resume_parser import ResumeParser, get_resume_parser
from jobcoach.services.pdf_generator import ResumePDFGenerator, generate_resume_pdf, is_pdf
from jobcoach.services.resume_exporter import export_resume_docx, export_resume_text
from jobcoach.services.session_timers import SessionTimers, TimerDriver, format_clock
from jobcoach.services.response_capture import ResponseCapture, BufferedRecorder
from jobcoach.services.speech import SpeechPlayback
from jobcoach.services.follow_up_assistant import FollowUpAssistant
from jobcoach.services.scoring_pipeline import ScoringPipeline, PipelineResult
from jobcoach.services.state_store import ApplicationsStore, ResultsStore, ResumeStore
from jobcoach.services.interview_session import InterviewSession, SessionState
from jobcoach.services.results_view import InterviewResults, load_results

__all__ = [
    # Resume
    "DocumentProcessor",
    "get_document_processor",
    "ResumeParser",
    "get_resume_parser",
    "ResumePDFGenerator",
    "generate_resume_pdf",
    "is_pdf",
    "export_resume_docx",
    "export_resume_text",
    # Interview session
    "SessionTimers",
    "TimerDriver",
    "format_clock",
    "ResponseCapture",
    "BufferedRecorder",
    "SpeechPlayback",
    "FollowUpAssistant",
    "InterviewSession",
    "SessionState",
    # Scoring and results
    "ScoringPipeline",
    "PipelineResult",
    "ApplicationsStore",
    "ResultsStore",
    "ResumeStore",
    "InterviewResults",
    "load_results",
]
