DEFAULT_HOST = '127.0.0.1'
DEFAULT_PORT = 8666

WIRE_ROOT = 'features/step_definitions'
WIRE_GLOB = '*.wire'

DEFAULT_OUTPUT = 'dots,junit,template'
JUNIT_FILE = 'TEST-all.xml'
HTML_FILE = 'output.html'
HTML_TEMPLATE = 'report.html.j2'

ENV_PERF = 'GHERKIN_PERF'

STDIN_NAME = 'STDIN'

# seconds
LAUNCH_GRACE_PERIOD = 1.0
LAUNCH_TIMEOUT = 60.0 * 60.0

STATUS_SUCCESS = 'success'

COMMAND_STEP_MATCHES = 'step_matches'
COMMAND_INVOKE = 'invoke'
COMMAND_BEGIN_SCENARIO = 'begin_scenario'
COMMAND_END_SCENARIO = 'end_scenario'
