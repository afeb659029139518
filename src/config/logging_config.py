import os
config = {
    'version': 1,
    'disable_existing_loggers': False,
    'filters': {
        'correlation_id': {
            '()': 'asgi_correlation_id.CorrelationIdFilter',
            'uuid_length': 32,
            'default_value': '-',
            },
        },
    'formatters': {
        'structFormatter': {
            'class': 'logging.Formatter',
            'format': '[%(correlation_id)s] %(message)s'
        }
    },
    'handlers': {
        'consoleHandler': {
            'class': 'logging.StreamHandler',
            'filters': ['correlation_id'],
            'level': 'DEBUG',
            'formatter': 'structFormatter'
        }
    },
    'loggers': {
        'root': {
            'handlers': ['consoleHandler'],
            'level': os.getenv('LOGGING_LEVEL_ROOT', 'INFO'),
            'propagate': False
        },
        '__main__': {
            'handlers': ['consoleHandler'],
            'level': os.getenv('LOGGING_LEVEL_MAIN', 'INFO'),
            'propagate': False
        },
        'src': {
            'handlers': ['consoleHandler'],
            'level': os.getenv('LOGGING_LEVEL_UPLOADS', 'INFO'),
            'propagate': False
        },
        'botocore': {
            'handlers': ['consoleHandler'],
            'level': os.getenv('LOGGING_LEVEL_BOTOCORE', 'WARNING'),
            'propagate': False
        }
    }
}
