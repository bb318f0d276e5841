VERSION = "1.0.0"
HTTPMODEL = "httpmodel " + VERSION
