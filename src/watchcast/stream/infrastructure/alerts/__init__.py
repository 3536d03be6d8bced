from .speech_sink import SpeechAlertSink, LogAlertSink
