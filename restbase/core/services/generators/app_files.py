"""
Starter application files — a minimal Express app wired for the
standard layout (logger, error handler, a health route).
"""

from __future__ import annotations

from restbase.core.models.config import ScaffoldConfig
from restbase.core.models.template import GeneratedFile

_APP_JS = """\
/**
 * Main application entry point
 */
require('dotenv').config();
const express = require('express');
const helmet = require('helmet');
const cors = require('cors');
const morgan = require('morgan');
const { errorHandler } = require('./middlewares/errorHandler');
const routes = require('./routes');
const logger = require('./utils/logger');

const app = express();
const port = process.env.PORT || 3000;

app.use(helmet());
app.use(cors());
app.use(express.json());
app.use(express.urlencoded({ extended: true }));
app.use(morgan('dev'));

app.use('/api', routes);

app.use(errorHandler);

if (process.env.NODE_ENV !== 'test') {
  app.listen(port, () => {
    logger.info(`Server running on port ${port}`);
  });
}

module.exports = app;
"""

_LOGGER_JS = """\
/**
 * Logger utility
 */
const bunyan = require('bunyan');

const logger = bunyan.createLogger({
  name: '{{projectName}}',
  level: process.env.LOG_LEVEL || 'info',
  stream: process.stdout,
});

if (process.env.NODE_ENV === 'test') {
  logger.level(bunyan.FATAL + 1);
}

module.exports = logger;
"""

_ERROR_HANDLER_JS = """\
/**
 * Global error handler middleware
 */
const logger = require('../utils/logger');

// eslint-disable-next-line no-unused-vars
const errorHandler = (err, req, res, next) => {
  const statusCode = err.statusCode || 500;

  logger.error({
    message: err.message,
    stack: err.stack,
    requestId: req.id,
  });

  res.status(statusCode).json({
    status: 'error',
    statusCode,
    message: statusCode === 500 ? 'An unexpected error occurred' : err.message,
    requestId: req.id,
  });
};

module.exports = { errorHandler };
"""

_ROUTES_JS = """\
/**
 * API Routes
 */
const express = require('express');

const router = express.Router();

router.get('/health', (req, res) => {
  res.status(200).json({ status: 'ok' });
});

module.exports = router;
"""


def generate_app_files(name: str, config: ScaffoldConfig) -> list[GeneratedFile]:
    """The four starter files, placed under the configured source dir."""
    src = config.directories.src
    return [
        GeneratedFile(path=f"{src}/app.js", content=_APP_JS, reason="app entry point"),
        GeneratedFile(
            path=f"{src}/utils/logger.js",
            content=_LOGGER_JS.replace("{{projectName}}", name),
            reason="logger",
        ),
        GeneratedFile(
            path=f"{src}/middlewares/errorHandler.js",
            content=_ERROR_HANDLER_JS,
            reason="error handler middleware",
        ),
        GeneratedFile(
            path=f"{src}/routes/index.js", content=_ROUTES_JS, reason="api routes"
        ),
    ]
